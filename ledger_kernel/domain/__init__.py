"""Pure domain layer: clock, fiscal calendar, classification table and DTOs."""
