"""Commands of the cctg CLI; importing a module registers it on the app."""
