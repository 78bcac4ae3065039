"""
Mule Flow Diagram - Main Entry Point

This script serves as the primary entry point to run the Mule flow diagram generator.
It directly calls the `main()` function from the `mule_diagram.main` module,
which handles command-line argument parsing and diagram generation.
"""
from mule_diagram.main import main

if __name__ == '__main__':
    main()
