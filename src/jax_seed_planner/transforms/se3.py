"""SE(3) rigid body transforms in JAX.

Poses are 4x4 homogeneous matrices and twists are 6-vectors
``[vx, vy, vz, wx, wy, wz]``. All functions are pure and JIT-able.
"""


import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def identity(dtype=jnp.float64) -> Array:
    """Identity pose."""
    return jnp.eye(4, dtype=dtype)


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def from_position_and_quaternion(p: Array, q: Array) -> Array:
    """Construct SE(3) transform from a position and a (w, x, y, z) quaternion."""
    return from_position_and_rotation(p, so3.from_quaternion(q))


def exp(twist: Array) -> Array:
    """
    SE(3) exponential map: convert twist to transformation matrix.

    Args:
        twist: (..., 6) array of twists [vx, vy, vz, wx, wy, wz]

    Returns:
        (..., 4, 4) array of transformation matrices
    """
    v, w = twist[..., :3], twist[..., 3:]
    angle = so3.safe_norm(w, keepdims=True)
    angle_sq = angle * angle

    is_small_angle = angle < 1e-6
    safe_angle = jnp.where(is_small_angle, 1.0, angle)

    # A = (1 - cos(theta)) / theta^2, B = (theta - sin(theta)) / theta^3
    A = jnp.where(is_small_angle, 0.5 - angle_sq / 24.0, (1.0 - jnp.cos(angle)) / safe_angle**2)
    B = jnp.where(is_small_angle, 1.0 / 6.0 - angle_sq / 120.0, (angle - jnp.sin(angle)) / safe_angle**3)

    K = so3.skew_symmetric(w)
    I = jnp.broadcast_to(jnp.eye(3, dtype=twist.dtype), K.shape)

    # V = I + A*K + B*K^2
    V = I + A[..., None] * K + B[..., None] * jnp.matmul(K, K)
    t = jnp.einsum("...ij,...j->...i", V, v)

    return from_position_and_rotation(t, so3.exp(w))


def multiply(T1: Array, T2: Array) -> Array:
    """
    Compose two transforms.

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    T^-1 = [[R^T, -R^T @ t], [0, 1]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R_inv = jnp.swapaxes(get_rotation(T), -1, -2)
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, get_position(T))

    return from_position_and_rotation(t_inv, R_inv)


def get_position(T: Array) -> Array:
    """Extract the (..., 3) position from a transform."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Extract the (..., 3, 3) rotation matrix from a transform."""
    return T[..., :3, :3]


def translation_distance(T1: Array, T2: Array) -> Array:
    """Euclidean distance between the origins of two poses."""
    return jnp.linalg.norm(get_position(T2) - get_position(T1), axis=-1)


def rotation_distance(T1: Array, T2: Array) -> Array:
    """Angle in radians between the orientations of two poses."""
    return so3.angular_distance(get_rotation(T1), get_rotation(T2))


def pose_error(T_current: Array, T_target: Array) -> Array:
    """
    Error twist that drives ``T_current`` towards ``T_target``.

    The linear part is the position difference and the angular part the
    axis-angle of ``R_target @ R_current^T``, both expressed in the world frame.

    Args:
        T_current: (..., 4, 4) current pose
        T_target: (..., 4, 4) desired pose

    Returns:
        (..., 6) error [dx, dy, dz, wx, wy, wz]
    """
    dp = get_position(T_target) - get_position(T_current)
    R_err = jnp.matmul(get_rotation(T_target), jnp.swapaxes(get_rotation(T_current), -1, -2))
    return jnp.concatenate([dp, so3.log(R_err)], axis=-1)
