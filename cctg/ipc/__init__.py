"""Local transport between short-lived CLI invocations and the cctg daemon."""
