"""Microsoft Graph access: credentials, path translation and the drive catalog."""
