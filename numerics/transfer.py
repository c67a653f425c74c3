"""2x2 transfer matrices stored flat as (m11, m12, m21, m22)."""

from __future__ import annotations

import math
from functools import reduce
from typing import Iterable, Tuple

from numerics.primitives import beta, cosh_safe, gamma, safe, sinh_safe


Matrix2 = Tuple[float, float, float, float]

IDENTITY: Matrix2 = (1.0, 0.0, 0.0, 1.0)


def matmul(A: Matrix2, B: Matrix2) -> Matrix2:
    a11, a12, a21, a22 = A
    b11, b12, b21, b22 = B
    return (
        a11 * b11 + a12 * b21,
        a11 * b12 + a12 * b22,
        a21 * b11 + a22 * b21,
        a21 * b12 + a22 * b22,
    )


def layer_matrix(E: float, V: float, w: float, mu: float = 1.0) -> Matrix2:
    """Map (psi, psi') across a flat layer of potential V and width w.

    E > V uses the oscillatory form with k = sqrt((E-V)/mu), otherwise the
    evanescent form with kappa = sqrt((V-E)/mu). Both wavenumbers go through
    ``safe``, so at E == V the matrix is the small-kappa evanescent one and
    only approximates the exact limit [[1, w], [0, 1]].
    """
    if E > V:
        k = safe(gamma(E, V, mu))
        kw = k * w
        c = math.cos(kw)
        s = math.sin(kw)
        return (c, s / k, -k * s, c)

    kappa = safe(beta(V, E, mu))
    kw = kappa * w
    ch = cosh_safe(kw)
    sh = sinh_safe(kw)
    return (ch, sh / kappa, kappa * sh, ch)


def compose(matrices: Iterable[Matrix2]) -> Matrix2:
    """Left fold of matmul in traversal order, seeded with the identity."""
    return reduce(matmul, matrices, IDENTITY)


def half_trace(M: Matrix2) -> float:
    return 0.5 * (M[0] + M[3])
