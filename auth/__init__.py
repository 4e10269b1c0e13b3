"""auth/ -- Authentication and session package for EmpRecords.

Layer rule: auth/ imports only stdlib + third-party libraries and core/.
It does NOT import from api/ or employees/.
api/ and employees/ import from auth/, not the other way around.
"""
