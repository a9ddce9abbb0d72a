#!/usr/bin/env python3
"""
Dissipative Control Demo.

This example drives a simulated robot to an attractor with a linear dynamical
system and a dissipative impedance controller, the typical velocity-based
control scheme of the control primitives.

Control Law:
    v_desired = K (x_attractor - x)
    command = D(v_desired) (v_desired - v)

Where:
    - K: Gain of the linear dynamical system
    - D(v_desired): Damping matrix whose first eigenvector is aligned with v_desired

The robot is simulated as decoupled unit masses (joint space) or as a floating
frame (Cartesian space), so no physics engine is required:

    a = command / mass,  v += a dt,  x += v dt

Usage:
------
1. Joint space demo (7 joints, 5 seconds):
   python examples/dissipative_control_demo.py

2. Cartesian space demo with decoupled linear/angular damping:
   python examples/dissipative_control_demo.py --config configs/franka_cartesian.yaml

3. Custom duration and plot results:
   python examples/dissipative_control_demo.py --duration 10 --plot

4. Custom joint target (radians, one per joint):
   python examples/dissipative_control_demo.py --target 0 -0.785 0 -2.356 0 1.571 0.785
"""

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial.transform import Rotation

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from control_primitives.core.config import (
    ControlConfig,
    create_controller,
    create_dynamical_system,
    load_config,
)
from control_primitives.core.pipeline import ControlPipeline
from control_primitives.core.state_representation import (
    CartesianAcceleration,
    CartesianPose,
    CartesianState,
    CartesianTwist,
    JointAccelerations,
    JointPositions,
    JointState,
    JointVelocities,
    dist,
)

DEFAULT_CONFIG = Path(__file__).parent.parent / "configs" / "franka_dissipative.yaml"


def make_joint_demo(config: ControlConfig, target: Optional[List[float]]):
    """Initial joint state at zero and a joint space attractor."""
    state = JointState.Zero(config.robot_name, config.joint_names)
    if target is None:
        target = np.linspace(-0.5, 0.5, config.dof)
    attractor = JointPositions(config.robot_name, config.joint_names, target)
    return state, attractor


def make_cartesian_demo(config: ControlConfig):
    """Initial frame at the origin of the reference frame and a Cartesian attractor."""
    state = CartesianState.Zero(config.ee_frame, config.reference_frame)
    attractor = CartesianPose(
        config.ee_frame,
        position=[0.4, 0.1, 0.3],
        orientation=Rotation.from_euler("xyz", [0.0, 0.3, 0.5]),
        reference_frame=config.reference_frame,
    )
    return state, attractor


def step_joint(state: JointState, command, dt: timedelta, mass: float) -> None:
    accelerations = JointAccelerations(state.name, state.get_names(), command.data() / mass)
    velocities = JointVelocities.from_joint_state(state) + accelerations * dt
    positions = JointPositions.from_joint_state(state) + velocities * dt
    state.set_positions(positions.data())
    state.set_velocities(velocities.data())
    state.set_accelerations(accelerations.data())
    state.set_torques(command.data())


def step_cartesian(state: CartesianState, command, dt: timedelta, mass: float) -> None:
    acceleration = CartesianAcceleration(
        state.name,
        command.get_force() / mass,
        command.get_torque() / mass,
        reference_frame=state.reference_frame,
    )
    twist = CartesianTwist.from_cartesian_state(state) + acceleration * dt
    pose = twist * dt + CartesianPose.from_cartesian_state(state)
    state.set_pose(pose.get_pose())
    state.set_twist(twist.get_twist())
    state.set_acceleration(acceleration.get_acceleration())
    state.set_wrench(command.get_wrench())


def run_demo(config: ControlConfig, duration: float, mass: float, target: Optional[List[float]]) -> Dict[str, np.ndarray]:
    """
    Run the closed loop and log the error to the attractor.

    Returns:
        Dictionary with time, distance to the attractor, speed and command norm
    """
    if config.space == "joint":
        state, attractor = make_joint_demo(config, target)
        step = step_joint
        reduce = JointPositions.from_joint_state
    else:
        state, attractor = make_cartesian_demo(config)
        step = step_cartesian
        reduce = CartesianPose.from_cartesian_state

    pipeline = ControlPipeline(
        dynamical_system=create_dynamical_system(config, attractor),
        controller=create_controller(config),
    )
    dt = timedelta(seconds=config.control_dt)
    n_steps = int(duration / config.control_dt)

    print(f"\nRunning {config.controller_type} control in {config.space} space")
    print(f"  Robot: {config.robot_name} ({config.dof} joints)")
    print(f"  Controller: {config.controller_hz} Hz, {n_steps} steps")
    print(f"  Attractor:\n{attractor}")

    log = {"time": [], "distance": [], "speed": [], "command": []}
    for i in range(n_steps):
        command = pipeline.control_tick(state)
        step(state, command, dt, mass)

        log["time"].append(i * config.control_dt)
        log["distance"].append(dist(reduce(state), attractor))
        log["speed"].append(np.linalg.norm(pipeline.get_desired_velocity().data()))
        log["command"].append(np.linalg.norm(command.data()))

        if i % max(1, n_steps // 10) == 0:
            print(f"  t={log['time'][-1]:5.2f}s  distance={log['distance'][-1]:.4f}  "
                  f"|command|={log['command'][-1]:.3f}")

    print(f"✓ Final distance to attractor: {log['distance'][-1]:.5f}")
    print(f"Final state:\n{state}")
    return {key: np.array(values) for key, values in log.items()}


def plot_results(log: Dict[str, np.ndarray], save_path: Optional[str]) -> None:
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(3, 1, figsize=(10, 8), sharex=True)
    axes[0].plot(log["time"], log["distance"])
    axes[0].set_ylabel("Distance to attractor")
    axes[1].plot(log["time"], log["speed"])
    axes[1].set_ylabel("|desired velocity|")
    axes[2].plot(log["time"], log["command"])
    axes[2].set_ylabel("|command|")
    axes[2].set_xlabel("Time (s)")
    for ax in axes:
        ax.grid(True)
    fig.suptitle("Dissipative control towards a linear attractor")
    fig.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path)
        print(f"✓ Plot saved to {save_path}")
    else:
        plt.show()


def main():
    parser = argparse.ArgumentParser(description="Dissipative control demo")
    parser.add_argument("--config", type=str, default=str(DEFAULT_CONFIG), help="YAML configuration file")
    parser.add_argument("--duration", type=float, default=5.0, help="Simulated duration (seconds)")
    parser.add_argument("--mass", type=float, default=1.0, help="Simulated mass/inertia per axis")
    parser.add_argument("--target", type=float, nargs="+", default=None, help="Joint target (radians)")
    parser.add_argument("--plot", action="store_true", help="Plot the results")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config)
    if args.target is not None and len(args.target) != config.dof:
        parser.error(f"--target needs {config.dof} values, got {len(args.target)}")

    log = run_demo(config, args.duration, args.mass, args.target)
    if args.plot:
        plot_results(log, config.plot_path)


if __name__ == "__main__":
    main()
