"""Services package for progress accounting, pacing and streaks."""
