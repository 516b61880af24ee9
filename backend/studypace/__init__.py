"""Study Pace: daily-quota study progress tracking service."""
