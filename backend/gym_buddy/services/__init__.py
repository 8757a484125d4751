"""Service layer.

Packages
--------
- ``_shared``: :class:`~gym_buddy.services._shared.base.BaseService`, the
  framework-agnostic errors and the infrastructure ports.
- ``workouts``: workout command/query services, the exercise reconciliation
  engine and their DTOs.

Nothing is re-exported here so that repositories can import the shared
errors without pulling in the service classes.
"""
