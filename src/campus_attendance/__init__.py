"""Campus attendance package.

Organized by feature modules (sessions, attendance, reports, ...) with a thin
Flask controller layer over service/repository layers that talk to a
document store.
"""
