"""User interface layer: verdict formatting and the command-line front end."""
