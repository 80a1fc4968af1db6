"""Example targeting specs and region keys shipped with fb_reach."""
