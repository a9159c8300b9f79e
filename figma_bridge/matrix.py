"""
2x3 affine matrix helpers.

Matrices use the design tool's row layout ``[[a, c, e], [b, d, f]]``.
"""

import math
from typing import List, Optional, Tuple

Matrix = List[List[float]]

SINGULAR_THRESHOLD = 1e-8
IDENTITY: Matrix = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]


def mat_mul(A: Matrix, B: Matrix) -> Matrix:
    a, c, e = A[0][0], A[0][1], A[0][2]
    b, d, f = A[1][0], A[1][1], A[1][2]
    a2, c2, e2 = B[0][0], B[0][1], B[0][2]
    b2, d2, f2 = B[1][0], B[1][1], B[1][2]
    return [
        [a * a2 + c * b2, a * c2 + c * d2, a * e2 + c * f2 + e],
        [b * a2 + d * b2, b * c2 + d * d2, b * e2 + d * f2 + f],
    ]


def mat_inv(A: Matrix) -> Optional[Matrix]:
    """Inverse of A, or None when A is singular."""
    a, c, e = A[0][0], A[0][1], A[0][2]
    b, d, f = A[1][0], A[1][1], A[1][2]
    det = a * d - b * c
    if not math.isfinite(det) or abs(det) < SINGULAR_THRESHOLD:
        return None
    inv_det = 1.0 / det
    ai = d * inv_det
    ci = -c * inv_det
    bi = -b * inv_det
    di = a * inv_det
    ei = -(ai * e + ci * f)
    fi = -(bi * e + di * f)
    return [[ai, ci, ei], [bi, di, fi]]


def mat_apply(M: Matrix, x: float, y: float) -> Tuple[float, float]:
    return (
        M[0][0] * x + M[0][1] * y + M[0][2],
        M[1][0] * x + M[1][1] * y + M[1][2],
    )


def has_rotation(M: Matrix, eps_rad: float = 5e-5) -> bool:
    a, b = M[0][0], M[1][0]
    if not (math.isfinite(a) and math.isfinite(b)):
        return False
    return abs(math.atan2(b, a)) > eps_rad


def has_reflection(M: Matrix, eps: float = 1e-10) -> bool:
    a, c = M[0][0], M[0][1]
    b, d = M[1][0], M[1][1]
    if not all(math.isfinite(v) for v in (a, b, c, d)):
        return False
    return a * d - b * c < -eps


def is_affine_2x3(M) -> bool:
    if not isinstance(M, (list, tuple)) or len(M) < 2:
        return False
    r0, r1 = M[0], M[1]
    if not isinstance(r0, (list, tuple)) or not isinstance(r1, (list, tuple)):
        return False
    if len(r0) < 3 or len(r1) < 3:
        return False
    for v in (r0[0], r0[1], r0[2], r1[0], r1[1], r1[2]):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return False
    return True


def is_identity_2x2(t) -> bool:
    """Exact identity check on a ``{a, b, c, d}`` record (missing keys count as identity)."""
    if not t:
        return True
    return t.get("a", 1) == 1 and t.get("b", 0) == 0 and t.get("c", 0) == 0 and t.get("d", 1) == 1
