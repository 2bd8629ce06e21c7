#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Compose and print labels from a label template.
"""

# local repo modules
import label_composer.cli


if __name__ == "__main__":
	label_composer.cli.main()
