"""FamLink - family trees, role inference, layout and Join ID linking."""
