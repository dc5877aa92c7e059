"""Workforce Payroll package.

Weekly payroll automation for construction crews: attendance punches feed a
per-employee weekly calculator, driven by a cutoff/reactive/manual scheduler.
Organized by feature modules with a thin Flask controller layer over
service/repository layers.
"""
