"""
Utility modules for phxtree.
"""

from .mix import (
    read_project_name,
    run_mix,
)

from .templates import (
    camelize,
    render_dev_local,
    render_test_local,
    ensure_gitignored,
    ensure_import_config,
)

from .docker import (
    docker_available,
    container_exists,
    container_running,
    run_postgres_container,
    wait_for_postgres,
    remove_container,
)

from .ports import is_port_in_use

__all__ = [
    # mix utilities
    'read_project_name',
    'run_mix',

    # config templates
    'camelize',
    'render_dev_local',
    'render_test_local',
    'ensure_gitignored',
    'ensure_import_config',

    # docker utilities
    'docker_available',
    'container_exists',
    'container_running',
    'run_postgres_container',
    'wait_for_postgres',
    'remove_container',

    'is_port_in_use',
]
