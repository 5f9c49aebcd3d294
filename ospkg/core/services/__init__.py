"""Services — command location, platform resolution, dispatch and installation."""
