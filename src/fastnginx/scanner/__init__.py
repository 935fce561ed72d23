"""Scanner package - Read-mostly probes run before provisioning."""

from fastnginx.scanner.system import SystemScanner

__all__ = ["SystemScanner"]
