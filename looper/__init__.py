"""Leveraged Kamino looping through Jupiter swaps."""
