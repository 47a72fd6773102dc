from windtunnel.aero.coefficients import drag_coefficient, lift_coefficient, strouhal_number
from windtunnel.aero.solver import AerodynamicResult, AerodynamicSolver, FlowParameters, solve

__all__ = [
    "AerodynamicResult",
    "AerodynamicSolver",
    "FlowParameters",
    "drag_coefficient",
    "lift_coefficient",
    "solve",
    "strouhal_number",
]
