"""The long-running cctg daemon."""
