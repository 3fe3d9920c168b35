"""scenes — Full-window screens pushed onto the app's scene stack."""
