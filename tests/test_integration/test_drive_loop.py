# Integration tests: full sense -> arbitrate -> actuate loop

import pytest
import numpy as np
from hybrid_drive.config import ArbitrationConfig
from hybrid_drive.control import build_arbiter
from hybrid_drive.core.geometry import StaticScene
from hybrid_drive.core.types import ArbitrationMode, ControllerState
from hybrid_drive.models import ConstantPolicySource, GaussianPolicy, TorchPolicySource
from hybrid_drive.sim import KinematicVehicle, make_demo_scene, run_episode


def make_config(mode, allow_reverse=False):
    return ArbitrationConfig.from_dict({
        "arbiter": {"arbitration_mode": mode, "allow_reverse_in_blend": allow_reverse},
    })


@pytest.mark.parametrize("mode", [m.value for m in ArbitrationMode])
def test_demo_course_every_mode(mode):
    scene, tracker, start = make_demo_scene()
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config(mode))

    record = run_episode(
        arbiter, vehicle, ConstantPolicySource(throttle=0.6), scene,
        tracker=tracker, start=start, num_steps=200,
    )

    assert record.length == 200
    assert np.all(np.abs(record.commands[:, 1]) <= 1.0)
    assert np.all(np.abs(record.commands[:, 0]) <= 1.0)
    assert sum(record.state_fractions().values()) == pytest.approx(1.0)
    assert arbiter.last_tick.mode is ArbitrationMode(mode)


def test_blended_never_reverses_when_forbidden():
    """Full-reverse policy is floored at zero throttle."""
    scene, tracker, start = make_demo_scene()
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config("blended"))

    record = run_episode(
        arbiter, vehicle, ConstantPolicySource(throttle=-1.0), scene,
        tracker=tracker, start=start, num_steps=100,
    )

    assert np.all(record.commands[:, 0] >= 0.0)


def test_blended_may_reverse_when_allowed():
    scene, tracker, start = make_demo_scene()
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config("blended", allow_reverse=True))

    record = run_episode(
        arbiter, vehicle, ConstantPolicySource(throttle=-1.0), scene,
        tracker=tracker, start=start, num_steps=100,
    )

    assert np.any(record.commands[:, 0] < 0.0)


def test_policy_only_crashes_into_post():
    """Policy alone ignores obstacles; collisions restart from the start pose."""
    scene = StaticScene()
    scene.add_cylinder(0.0, 3.0, 1.5)
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config("policy_only"))

    record = run_episode(
        arbiter, vehicle, ConstantPolicySource(throttle=1.0), scene,
        start=(0.0, 0.0, 0.0), num_steps=200,
    )

    assert record.collisions >= 1
    assert record.summary()["min_obstacle_distance"] < 3.0


def test_controller_reacts_to_post():
    """Driving at a post puts the controller into avoidance."""
    scene = StaticScene()
    scene.add_cylinder(0.0, 8.0, 1.0)
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config("state_only"))

    record = run_episode(
        arbiter, vehicle, ConstantPolicySource(), scene,
        start=(0.0, 0.0, 0.0), num_steps=150,
    )

    visited = {list(ControllerState)[code] for code in np.unique(record.states)}
    assert ControllerState.AVOID_OBSTACLE in visited


def test_learned_policy_drives_loop(set_seed):
    scene, tracker, start = make_demo_scene()
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, make_config("blended"))
    policy = TorchPolicySource(GaussianPolicy(hidden_dims=[16, 16]))

    record = run_episode(
        arbiter, vehicle, policy, scene,
        tracker=tracker, start=start, num_steps=50,
    )

    assert record.length == 50
    assert np.all(np.abs(record.policy_actions) <= 1.0)
    rows = record.rows()
    assert len(rows) == 50
    assert rows[0]["state"] in {s.value for s in ControllerState}
