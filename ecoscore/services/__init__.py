"""Engine services and external collaborators."""
