"""Campaign analyst application - models, repositories, services."""
