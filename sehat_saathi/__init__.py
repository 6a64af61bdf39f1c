"""
Sehat Saathi

A FastAPI backend connecting patients and doctors: token authentication,
role-based access control, the appointment status workflow and prescriptions.
"""

__version__ = "1.0.0"
