"""scrotmenu: take a screenshot, then pick what to do with it.

- Full screen or region capture through scrot
- Action menu through zenity: upload to imgur, save as, open with a
  viewer, copy to clipboard
- Desktop notifications for upload results
"""

__version__ = "0.3.0"
