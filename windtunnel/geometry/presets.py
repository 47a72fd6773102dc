from __future__ import annotations

import math

import numpy as np

from windtunnel.errors import InvalidInputError

Center = tuple[float, float]


def circle(radius: float = 50.0, n_points: int = 64, center: Center = (0.0, 0.0)) -> np.ndarray:
    if radius <= 0.0:
        raise InvalidInputError("`radius` must be > 0.")
    if n_points < 3:
        raise InvalidInputError("`n_points` must be >= 3.")
    theta = 2.0 * np.pi * np.arange(n_points) / n_points
    return np.column_stack([center[0] + radius * np.cos(theta), center[1] + radius * np.sin(theta)])


def rectangle(width: float = 100.0, height: float = 20.0, center: Center = (0.0, 0.0)) -> np.ndarray:
    """Corners in screen order: top-left, top-right, bottom-right, bottom-left."""
    if width <= 0.0 or height <= 0.0:
        raise InvalidInputError("`width` and `height` must be > 0.")
    hw = width / 2.0
    hh = height / 2.0
    cx, cy = center
    return np.array(
        [[cx - hw, cy - hh], [cx + hw, cy - hh], [cx + hw, cy + hh], [cx - hw, cy + hh]],
        dtype=float,
    )


def triangle(width: float = 100.0, height: float = 100.0, center: Center = (0.0, 0.0)) -> np.ndarray:
    """Isosceles triangle with its apex up on screen."""
    if width <= 0.0 or height <= 0.0:
        raise InvalidInputError("`width` and `height` must be > 0.")
    cx, cy = center
    return np.array(
        [[cx, cy - height / 2.0], [cx - width / 2.0, cy + height / 2.0], [cx + width / 2.0, cy + height / 2.0]],
        dtype=float,
    )


def naca4(
    code: str = "2412",
    chord: float = 200.0,
    n_panels: int = 100,
    origin: Center = (0.0, 0.0),
) -> np.ndarray:
    """NACA 4-digit section in screen coordinates (Y down), leading edge at `origin`.

    Cosine spacing clusters points at both edges. The outline runs along the
    upper surface from leading to trailing edge, then back along the lower
    surface.

    Reference: Abbott and von Doenhoff, Theory of Wing Sections, sec. 6.4.
    """
    code = str(code).strip().upper().replace("NACA", "").strip()
    if len(code) != 4 or not code.isdigit():
        raise InvalidInputError(f"NACA code must be 4 digits, got {code!r}.")
    if chord <= 0.0 or n_panels < 2:
        raise InvalidInputError("`chord` must be > 0 and `n_panels` >= 2.")

    m = int(code[0]) / 100.0
    p = int(code[1]) / 10.0
    t = int(code[2:]) / 100.0
    if m > 0.0 and not 0.0 < p < 1.0:
        raise InvalidInputError(f"Cambered NACA code {code!r} needs a camber position digit in 1..9.")

    beta = np.arange(n_panels + 1) / n_panels
    xc = 0.5 * (1.0 - np.cos(math.pi * beta))

    yt = 5.0 * t * (
        0.2969 * np.sqrt(xc) - 0.1260 * xc - 0.3516 * xc**2 + 0.2843 * xc**3 - 0.1015 * xc**4
    )

    yc = np.zeros_like(xc)
    dyc_dx = np.zeros_like(xc)
    if m > 0.0:
        fore = xc < p
        aft = ~fore
        yc[fore] = (m / p**2) * (2.0 * p * xc[fore] - xc[fore] ** 2)
        dyc_dx[fore] = (2.0 * m / p**2) * (p - xc[fore])
        yc[aft] = (m / (1.0 - p) ** 2) * ((1.0 - 2.0 * p) + 2.0 * p * xc[aft] - xc[aft] ** 2)
        dyc_dx[aft] = (2.0 * m / (1.0 - p) ** 2) * (p - xc[aft])

    theta = np.arctan(dyc_dx)
    xu = xc - yt * np.sin(theta)
    yu = yc + yt * np.cos(theta)
    xl = xc + yt * np.sin(theta)
    yl = yc - yt * np.cos(theta)

    upper = np.column_stack([xu, -yu]) * chord
    lower = np.column_stack([xl, -yl]) * chord
    # Skip the lower surface's copy of the leading edge; the outline closes implicitly.
    outline = np.vstack([upper, lower[::-1][:-1]])
    return outline + np.asarray(origin, dtype=float)


def from_name(name: str) -> np.ndarray:
    """Resolve `circle`, `rectangle`, `square`, `triangle` or `naca:XXXX` / `nacaXXXX`."""
    key = name.strip().lower()
    if key == "circle":
        return circle()
    if key == "rectangle":
        return rectangle()
    if key == "square":
        return rectangle(width=100.0, height=100.0)
    if key == "triangle":
        return triangle()
    if key.startswith("naca"):
        return naca4(key[4:].lstrip(":"))
    raise InvalidInputError(f"Unknown preset shape {name!r}.")
