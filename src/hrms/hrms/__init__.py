"""HRMS backend package.

This package is organized by feature modules (employees, attendance, payroll, ...)
with a thin Flask controller layer over service and MySQL repository layers.
"""
