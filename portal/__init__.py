"""Clinic portal application.

Models, domain services, access rules and the REST surface for
appointments, medical records, staff and accounts.
"""
