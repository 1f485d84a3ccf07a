"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
JTOQ - JUnit to qTest
A CLI tool for mapping pipeline configuration and submitting JUnit results to qTest
"""

__version__ = "0.1.0"
