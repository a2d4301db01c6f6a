"""UI adapters that host an EditorEngine."""
