"""
Selection pipeline package.

Stage catalog, per-stage status and task configuration, and the
per-applicant stage progression engine.
"""
