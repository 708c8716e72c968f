"""HR portal package.

Organised by feature (users, attendance, requests, onboarding, payroll, leave,
performance, dashboard), each with a thin Flask controller over service and
repository layers.
"""
