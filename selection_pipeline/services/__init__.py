"""Business logic for the stage catalog, applicant tasks and stage progress."""
