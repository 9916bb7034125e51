"""City weather proxy with a per-IP fixed-window request quota."""
