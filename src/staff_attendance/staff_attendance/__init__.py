"""Staff Attendance package.

This package is organized by feature modules (attendance, instructors, reports)
with a thin Flask controller layer on top of service and store layers.
"""
