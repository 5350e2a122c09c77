"""Record store, repositories, and shared configuration."""
