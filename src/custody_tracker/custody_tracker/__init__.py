"""Custody Tracker package.

Server-side core for sealed exam-paper pack deliveries: proof-of-custody
events, the delivery task state machine and geo-fenced attendance. Organized
by feature modules (tasks, events, attendance, audit) with a thin Flask
controller layer over service/repository layers.
"""
