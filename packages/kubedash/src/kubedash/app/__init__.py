"""kubedash.app: the Kubernetes dashboard built on kubedash.tui."""
