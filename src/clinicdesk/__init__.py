"""ClinicDesk: admin dashboard backend for the clinic booking platform."""
