"""Worksite tracking engine.

Attendance and task-assignment state machines for construction crews,
gated by project geofences. The package is organized by feature modules
(geofence, attendance, tasks, summary, ...) with service/repository layers;
HTTP controllers and persistence live with the caller.
"""
