"""SO(3) and so(3) operations in JAX.

Rotations are 3x3 matrices, tangent vectors are axis-angle 3-vectors. All
functions are pure, JIT-able and batch over leading dimensions.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric (cross product) matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)
    x, y, z = v[..., 0], v[..., 1], v[..., 2]

    return jnp.stack([
        jnp.stack([zeros, -z, y], axis=-1),
        jnp.stack([z, zeros, -x], axis=-1),
        jnp.stack([-y, x, zeros], axis=-1)
    ], axis=-2)


def safe_norm(v: Array, keepdims: bool = False) -> Array:
    """Euclidean norm over the last axis whose derivative is zero, not NaN, at the origin."""
    sq = jnp.sum(v * v, axis=-1, keepdims=keepdims)
    nonzero = sq > 0.0
    return jnp.where(nonzero, jnp.sqrt(jnp.where(nonzero, sq, 1.0)), 0.0)


def exp(log_r: Array) -> Array:
    """
    SO(3) exponential map (Rodrigues' formula).

    Args:
        log_r: (..., 3) array of axis-angle vectors

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle = safe_norm(log_r, keepdims=True)
    small_angle = angle < 1e-8

    # Taylor expansion near zero keeps the gradient finite
    safe_angle = jnp.where(small_angle, 1.0, angle)
    sin_coeff = jnp.where(small_angle, 1.0 - angle**2 / 6.0, jnp.sin(angle) / safe_angle)
    cos_coeff = jnp.where(small_angle, 0.5 - angle**2 / 24.0, (1.0 - jnp.cos(angle)) / safe_angle**2)

    K = skew_symmetric(log_r)
    I = jnp.broadcast_to(jnp.eye(3, dtype=log_r.dtype), K.shape)

    return I + sin_coeff[..., None] * K + cos_coeff[..., None] * jnp.matmul(K, K)


def _vee(R: Array) -> Array:
    """Twice the axis-sine vector held in the antisymmetric part of R."""
    return jnp.stack([
        R[..., 2, 1] - R[..., 1, 2],
        R[..., 0, 2] - R[..., 2, 0],
        R[..., 1, 0] - R[..., 0, 1]
    ], axis=-1)


def log(R: Array) -> Array:
    """
    SO(3) logarithm map: rotation matrix to axis-angle vector.

    Args:
        R: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 3) array of axis-angle vectors with angle in [0, pi]
    """
    angle = rotation_angle(R)
    small_angle = angle < 1e-8
    near_pi = jnp.abs(angle - jnp.pi) < 1e-6
    vee = _vee(R)

    safe_sin = jnp.where(small_angle | near_pi, 1.0, jnp.sin(angle))
    axis_general = vee / (2.0 * safe_sin[..., None])

    # Near pi the antisymmetric part vanishes, take the dominant column of (R + I) / 2
    B = (R + jnp.eye(3, dtype=R.dtype)) / 2.0
    max_idx = jnp.argmax(jnp.diagonal(B, axis1=-2, axis2=-1), axis=-1)
    axis_pi = jnp.take_along_axis(B, max_idx[..., None, None], axis=-1)[..., 0]
    axis_pi = axis_pi / jnp.linalg.norm(axis_pi, axis=-1, keepdims=True)

    return jnp.where(
        small_angle[..., None],
        vee / 2.0,
        jnp.where(near_pi[..., None], angle[..., None] * axis_pi, angle[..., None] * axis_general),
    )


def rotation_angle(R: Array) -> Array:
    """Rotation angle in [0, pi] of a rotation matrix."""
    # atan2 stays accurate near 0 and pi where arccos of the trace loses precision
    cos_angle = (jnp.trace(R, axis1=-2, axis2=-1) - 1.0) / 2.0
    sin_angle = safe_norm(_vee(R)) / 2.0
    return jnp.arctan2(sin_angle, cos_angle)


def angular_distance(R1: Array, R2: Array) -> Array:
    """
    Angle of the relative rotation between two orientations.

    Equal to the quaternion angular distance between ``R1`` and ``R2``.

    Args:
        R1: (..., 3, 3) first rotation matrix
        R2: (..., 3, 3) second rotation matrix

    Returns:
        (...) angle in radians, in [0, pi]
    """
    return rotation_angle(jnp.matmul(jnp.swapaxes(R1, -1, -2), R2))


def from_quaternion(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) array of quaternions in (w, x, y, z) format

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    quaternions = quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)
    w, x, y, z = jnp.moveaxis(quaternions, -1, 0)

    xx, yy, zz = x*x, y*y, z*z
    wx, wy, wz = w*x, w*y, w*z
    xy, xz, yz = x*y, x*z, y*z

    return jnp.stack([
        jnp.stack([1 - 2*(yy + zz), 2*(xy - wz), 2*(xz + wy)], axis=-1),
        jnp.stack([2*(xy + wz), 1 - 2*(xx + zz), 2*(yz - wx)], axis=-1),
        jnp.stack([2*(xz - wy), 2*(yz + wx), 1 - 2*(xx + yy)], axis=-1)
    ], axis=-2)
