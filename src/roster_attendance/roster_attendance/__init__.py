"""Roster & attendance package.

Organized by feature modules (accounts, classes, enrollments, attendance,
access, reports, timetable) with a thin Flask controller layer over
service/repository layers.
"""
