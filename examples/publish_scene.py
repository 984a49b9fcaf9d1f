import logging
import time

import numpy as np

import scenekv


def _make_arm() -> scenekv.ArticulatedBody:
    link = (
        scenekv.Graphics(
            name="link",
            geometry=scenekv.Geometry(type="cylinder", radius=0.04, length=0.4),
            T_to_parent=scenekv.Pose(pos=(0.0, 0.0, 0.2)),
            material=scenekv.Material(name="steel", rgba=(0.6, 0.6, 0.65, 1.0)),
        ),
    )
    return scenekv.ArticulatedBody(
        "arm",
        [
            scenekv.RigidBody("shoulder", id_parent=-1, joint=scenekv.Joint("rz"), graphics=link),
            scenekv.RigidBody(
                "elbow",
                id_parent=0,
                T_to_parent=scenekv.Pose(pos=(0.0, 0.0, 0.4)),
                joint=scenekv.Joint("ry"),
                graphics=link,
            ),
        ],
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    server = scenekv.run(port=8000)
    registry = server.registry()
    keys = registry.model_keys("demo")

    arm = _make_arm()
    ball = scenekv.ObjectModel(
        name="ball",
        graphics=[scenekv.Graphics(name="ball", geometry=scenekv.Geometry(type="sphere", radius=0.05))],
        key_pos="demo::ball::pos",
        key_ori="demo::ball::ori",
    )

    registry.clear_model_keys(keys)
    registry.register_robot(keys, scenekv.RobotModel(arm, key_q="demo::arm::q"))
    registry.register_object(keys, ball)
    registry.register_model_keys(keys, commit=True)

    pos = np.array([0.5, 0.0, 0.3])
    ori = np.array([0.0, 0.0, 0.0, 1.0])
    try:
        while True:
            interaction = registry.get_interaction()
            if interaction is not None and interaction.key_object == keys.key_objects_prefix + ball.name:
                if interaction.key_down:
                    pos, ori = scenekv.keypress_adjust_pose(interaction, pos, ori)
                else:
                    pos, ori = scenekv.click_adjust_pose(interaction, pos, ori)

            # External wrenches for a dynamics solver.
            if interaction is not None:
                for idx, f in scenekv.compute_external_forces(keys, arm, interaction).items():
                    logging.getLogger("demo").debug("link %d: %s", idx, f.as_vector())

            registry.publish_pose(ball.key_pos, ball.key_ori, pos, ori)
            registry.publish_configuration("demo::arm::q", arm.q, commit=True)
            time.sleep(1.0 / 60.0)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
