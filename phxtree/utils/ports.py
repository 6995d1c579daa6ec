"""
Local port probing.
"""

import socket


def is_port_in_use(port: int, host: str = '127.0.0.1') -> bool:
    """Check whether something is already bound to host:port."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            return False
    except OSError:
        return True
