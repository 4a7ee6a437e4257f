"""Clients for the files published by the DCA bot."""
