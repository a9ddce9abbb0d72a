import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .contracts import ComputationalSpace
from .controllers import BaseImpedanceController, Dissipative, Impedance
from .dynamical_systems import Linear
from .state_representation import CartesianPose, JointPositions
from .state_representation.joint_space import make_joint_names

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent  # Repository root

Gain = Union[float, List[float], List[List[float]]]

_SPACES = ("joint", "cartesian")
_CONTROLLERS = ("dissipative", "impedance")


@dataclass
class ControlConfig:
    # Robot
    robot_name: str
    joint_names: List[str]
    ee_frame: str = "ee"
    reference_frame: str = "world"

    # Dynamical system
    space: str = "joint"
    ds_gain: Gain = 1.0

    # Controller
    controller_type: str = "dissipative"
    computational_space: ComputationalSpace = ComputationalSpace.FULL
    damping_eigenvalues: Optional[List[float]] = None
    zero_velocity_threshold: float = 1e-4
    stiffness: Gain = 0.0
    damping: Gain = 0.0
    inertia: Gain = 0.0

    # Rates
    controller_hz: float = 1000.0

    # Output
    plot_path: Optional[str] = None

    @property
    def dof(self) -> int:
        return len(self.joint_names)

    @property
    def control_dt(self) -> float:
        return 1.0 / self.controller_hz

    @property
    def nb_dimensions(self) -> int:
        return self.dof if self.space == "joint" else 6


def _resolve_tokens(value: Any, project_root: Path) -> Any:
    """Replace ``${PROJECT_ROOT}`` in every string of a YAML tree."""
    if isinstance(value, str):
        return value.replace("${PROJECT_ROOT}", str(project_root))
    if isinstance(value, list):
        return [_resolve_tokens(item, project_root) for item in value]
    if isinstance(value, dict):
        return {key: _resolve_tokens(item, project_root) for key, item in value.items()}
    return value


def _choice(value: str, choices, label: str) -> str:
    value = str(value).strip().lower()
    if value not in choices:
        raise ValueError(f"Unknown {label} '{value}', expected one of {list(choices)}")
    return value


def config_from_dict(data: Dict[str, Any], project_root: Path = PROJECT_ROOT) -> ControlConfig:
    """
    Build a ControlConfig from a parsed YAML tree.

    Missing sections fall back to the ControlConfig defaults. The robot section
    must give either ``joint_names`` or ``dof``.

    Raises:
        ValueError: if a value is malformed
    """
    data = _resolve_tokens(data or {}, project_root)
    robot = data.get("robot", {})
    ds = data.get("dynamical_system", {})
    controller = data.get("controller", {})
    rates = data.get("rates", {})
    output = data.get("output", {})

    if "joint_names" in robot:
        joint_names = make_joint_names(robot["joint_names"])
    elif "dof" in robot:
        joint_names = make_joint_names(int(robot["dof"]))
    else:
        raise ValueError("The robot section needs either 'joint_names' or 'dof'")

    controller_hz = float(rates.get("controller_hz", 1000.0))
    if controller_hz <= 0.0:
        raise ValueError(f"controller_hz must be positive, got {controller_hz}")

    eigenvalues = controller.get("damping_eigenvalues")

    return ControlConfig(
        robot_name=str(robot.get("name", "robot")),
        joint_names=joint_names,
        ee_frame=str(robot.get("ee_frame", "ee")),
        reference_frame=str(robot.get("reference_frame", "world")),
        space=_choice(ds.get("space", "joint"), _SPACES, "space"),
        ds_gain=ds.get("gain", 1.0),
        controller_type=_choice(controller.get("type", "dissipative"), _CONTROLLERS, "controller type"),
        computational_space=ComputationalSpace.from_string(controller.get("computational_space", "full")),
        damping_eigenvalues=None if eigenvalues is None else [float(value) for value in eigenvalues],
        zero_velocity_threshold=float(controller.get("zero_velocity_threshold", 1e-4)),
        stiffness=controller.get("stiffness", 0.0),
        damping=controller.get("damping", 0.0),
        inertia=controller.get("inertia", 0.0),
        controller_hz=controller_hz,
        plot_path=output.get("plot_path"),
    )


def load_config(path: str) -> ControlConfig:
    with open(path, "r") as f:
        data = yaml.safe_load(f)

    config = config_from_dict(data)
    logger.info("Loaded %s controller configuration for %s from %s",
                config.controller_type, config.robot_name, path)
    return config


def create_controller(config: ControlConfig) -> BaseImpedanceController:
    """
    Instantiate the controller described by a configuration.

    Joint space dissipative controllers always use the FULL computational space.
    """
    if config.controller_type == "dissipative":
        if config.space == "joint":
            controller = Dissipative.for_joints(config.dof, config.zero_velocity_threshold)
        else:
            controller = Dissipative(
                config.computational_space, 6, config.zero_velocity_threshold
            )
        if config.damping_eigenvalues is not None:
            controller.set_damping_eigenvalues(config.damping_eigenvalues)
        return controller
    if config.controller_type == "impedance":
        return Impedance(
            config.nb_dimensions,
            stiffness=config.stiffness,
            damping=config.damping,
            inertia=config.inertia,
        )
    raise ValueError(f"Unknown controller type '{config.controller_type}'")


def create_dynamical_system(config: ControlConfig, attractor=None) -> Linear:
    """
    Instantiate a linear dynamical system with the configured gain.

    Args:
        config: Configuration
        attractor: Initial attractor. Defaults to an empty attractor of the
            configured space, to be set later with ``set_attractor``.
    """
    if attractor is None:
        if config.space == "joint":
            attractor = JointPositions(config.robot_name, config.joint_names)
        else:
            attractor = CartesianPose(config.ee_frame, reference_frame=config.reference_frame)
    return Linear(attractor, config.ds_gain)
