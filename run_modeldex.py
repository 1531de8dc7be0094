#!/usr/bin/env python3
"""
modeldex launcher script.

Run this from the project root to open the model gallery.
"""

if __name__ == '__main__':
    from modeldex.run_gui import main
    main()
