"""Protocol implementations for NodeChord."""
