"""Service layer: OTP issuing, the appliance ledger and email delivery."""
