"""
Jacobian of a robot at a frame.

The Jacobian maps joint velocities to the twist of ``frame`` expressed in
``reference_frame``. Its forward form is 6xN; the transposed and pseudo-inverse
forms are Nx6 and map twists and wrenches back to joint space.
"""

from typing import List, Union

import numpy as np

from ..exceptions import IncompatibleSizeError, IncompatibleStatesError
from .cartesian_space import CartesianPose, CartesianTwist, CartesianWrench
from .joint_space import JointNames, JointTorques, JointVelocities, make_joint_names
from .state import State


class Jacobian(State):
    """
    Named, frame-tagged 6xN matrix of a robot's differential kinematics.

    Example:
        jacobian = Jacobian('franka', 7, 'ee', 'world')
        jacobian.set_data(matrix_from_robot_model)
        twist = jacobian * joint_velocities
        joint_velocities = jacobian.solve(twist)
        torques = jacobian.transpose() * wrench
    """

    def __init__(
        self,
        robot_name: str = "",
        joint_names: JointNames = 0,
        frame: str = "",
        reference_frame: str = "world",
    ):
        super().__init__(robot_name)
        self._joint_names = make_joint_names(joint_names)
        self._frame = frame
        self._reference_frame = reference_frame
        self._data = np.zeros((6, len(self._joint_names)))
        # True for the Nx6 forms returned by transpose() and pseudoinverse()
        self._transposed = False

    @classmethod
    def Random(
        cls,
        robot_name: str,
        joint_names: JointNames,
        frame: str = "",
        reference_frame: str = "world",
    ) -> "Jacobian":
        jacobian = cls(robot_name, joint_names, frame, reference_frame)
        jacobian.set_data(np.random.uniform(-1.0, 1.0, jacobian._data.shape))
        return jacobian

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    def get_joint_names(self) -> List[str]:
        return list(self._joint_names)

    def get_frame(self) -> str:
        return self._frame

    def set_frame(self, frame: str) -> None:
        self._frame = frame

    def get_reference_frame(self) -> str:
        return self._reference_frame

    def set_reference_frame(self, reference_frame: str) -> None:
        self._reference_frame = reference_frame

    def _identity(self) -> tuple:
        return (self.name, tuple(self._joint_names), self._frame, self._reference_frame, self._transposed)

    def data(self) -> np.ndarray:
        return self._data.copy()

    def set_data(self, data) -> None:
        """
        Set the matrix.

        Raises:
            IncompatibleSizeError: if the shape differs from the current form (6xN or Nx6)
        """
        matrix = np.array(data, dtype=float)
        if matrix.shape != self._data.shape:
            raise IncompatibleSizeError(
                f"Input matrix of shape {matrix.shape} is incompatible with a Jacobian of shape {self._data.shape}"
            )
        self._data = matrix
        self.set_filled()

    def col(self, index: int) -> np.ndarray:
        return self._data[:, index].copy()

    def row(self, index: int) -> np.ndarray:
        return self._data[index, :].copy()

    def _derived(self, data: np.ndarray, transposed: bool) -> "Jacobian":
        result = Jacobian(self.name, self._joint_names, self._frame, self._reference_frame)
        result._data = data
        result._transposed = transposed
        result._empty = self._empty
        return result

    def transpose(self) -> "Jacobian":
        return self._derived(self._data.T.copy(), not self._transposed)

    def pseudoinverse(self, rcond: float = 1e-15) -> "Jacobian":
        """Moore-Penrose pseudo-inverse, singular values below ``rcond`` are discarded."""
        self._assert_not_empty()
        return self._derived(np.linalg.pinv(self._data, rcond=rcond), not self._transposed)

    def inverse(self) -> "Jacobian":
        self._assert_not_empty()
        if self.rows != self.cols:
            raise IncompatibleSizeError(
                f"Cannot invert a non-square Jacobian of shape {self._data.shape}, use pseudoinverse()"
            )
        return self._derived(np.linalg.inv(self._data), not self._transposed)

    def solve(self, target: Union[CartesianTwist, np.ndarray]) -> Union[JointVelocities, np.ndarray]:
        """
        Least-squares solution of ``J x = target``.

        Args:
            target: Twist expressed in the Jacobian's reference frame, or a matrix
                with 6 rows

        Returns:
            JointVelocities for a twist, an array otherwise

        Raises:
            IncompatibleStatesError: if the twist's reference frame differs from the Jacobian's
            IncompatibleSizeError: if the target does not have 6 rows
        """
        self._assert_not_empty()
        if self._transposed:
            raise IncompatibleSizeError("solve() is only defined for the 6xN form of the Jacobian")
        if isinstance(target, CartesianTwist):
            self._check_task_state(target)
            solution = np.linalg.lstsq(self._data, target.data(), rcond=None)[0]
            return JointVelocities(self.name, self._joint_names, solution)
        matrix = np.asarray(target, dtype=float)
        if matrix.ndim == 0 or matrix.shape[0] != self.rows:
            raise IncompatibleSizeError(
                f"Input of shape {matrix.shape} is incompatible with a Jacobian of shape {self._data.shape}"
            )
        return np.linalg.lstsq(self._data, matrix, rcond=None)[0]

    def change_reference_frame(self, pose: CartesianPose) -> "Jacobian":
        """
        Express the Jacobian in the reference frame of ``pose``.

        Raises:
            IncompatibleStatesError: if ``pose`` is not the pose of the current reference frame
        """
        self._assert_not_empty()
        pose._assert_not_empty()
        if pose.name != self._reference_frame:
            raise IncompatibleStatesError(
                f"Expected the pose of {self._reference_frame}, got the pose of {pose.name}"
            )
        rotation = pose.get_rotation().as_matrix()
        block = np.zeros((6, 6))
        block[:3, :3] = rotation
        block[3:, 3:] = rotation
        data = self._data @ block.T if self._transposed else block @ self._data
        result = self._derived(data, self._transposed)
        result._reference_frame = pose.reference_frame
        return result

    def _check_task_state(self, state: Union[CartesianTwist, CartesianWrench]) -> None:
        state._assert_not_empty()
        if state.reference_frame != self._reference_frame:
            raise IncompatibleStatesError(
                f"The Jacobian of {self._frame} is expressed in {self._reference_frame}, "
                f"{state.name} is expressed in {state.reference_frame}"
            )

    def __mul__(self, other):
        if isinstance(other, JointVelocities):
            if self._transposed:
                raise IncompatibleSizeError("Joint velocities require the 6xN form of the Jacobian")
            self._assert_not_empty()
            other._assert_not_empty()
            if other.get_size() != self.cols:
                raise IncompatibleSizeError(
                    f"{other.get_size()} joint velocities are incompatible with a Jacobian of {self.cols} joints"
                )
            if other.get_names() != self._joint_names:
                raise IncompatibleStatesError(
                    f"Joint names {other.get_names()} differ from the Jacobian's {self._joint_names}"
                )
            twist = self._data @ other.data()
            return CartesianTwist(self._frame, twist[:3], twist[3:], reference_frame=self._reference_frame)
        if isinstance(other, (CartesianTwist, CartesianWrench)):
            if not self._transposed:
                raise IncompatibleSizeError(
                    "Twists and wrenches require the transposed or pseudo-inverse form of the Jacobian"
                )
            self._assert_not_empty()
            self._check_task_state(other)
            joint_values = self._data @ other.data()
            joint_type = JointVelocities if isinstance(other, CartesianTwist) else JointTorques
            return joint_type(self.name, self._joint_names, joint_values)
        if isinstance(other, (np.ndarray, list, tuple)):
            matrix = np.asarray(other, dtype=float)
            if matrix.ndim == 0 or matrix.shape[0] != self.cols:
                raise IncompatibleSizeError(
                    f"Input of shape {matrix.shape} is incompatible with a Jacobian of shape {self._data.shape}"
                )
            return self._data @ matrix
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, CartesianPose):
            return self.change_reference_frame(other)
        if isinstance(other, (np.ndarray, list, tuple)):
            matrix = np.asarray(other, dtype=float)
            if matrix.ndim == 0 or matrix.shape[-1] != self.rows:
                raise IncompatibleSizeError(
                    f"Input of shape {matrix.shape} is incompatible with a Jacobian of shape {self._data.shape}"
                )
            return matrix @ self._data
        return NotImplemented

    def __repr__(self) -> str:
        header = f"Jacobian of {self.name} at {self._frame} expressed in {self._reference_frame}"
        if self.is_empty():
            return f"{header} (empty)"
        return f"{header}\njoint names: {self._joint_names}\n{np.array2string(self._data, precision=4)}"
