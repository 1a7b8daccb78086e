"""Infrastructure layer: settings, configuration, logging and XML parsing."""
