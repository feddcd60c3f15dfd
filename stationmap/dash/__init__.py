"""
Station map Dash application.

Model / Controller / View / NavigationView objects are built once per
process and wired to the page through Dash callbacks.
"""
