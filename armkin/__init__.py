"""armkin: kinematics, Jacobians and workspace analysis for DH robot arms."""

__version__ = "0.1.0"
