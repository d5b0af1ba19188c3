"""ConsorcioManager: consulta de pagos y sentencias judiciales de pensionados."""
