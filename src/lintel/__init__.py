"""Lintel: Critical Path Method scheduling for construction projects."""
