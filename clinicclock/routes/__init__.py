# ClinicClock - Routes
