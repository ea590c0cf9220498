"""FleetTrack backend: trip mileage validation, gap detection and fleet analytics."""
