"""Embedded payload resources. The release build copies ``payload.zip`` here."""
