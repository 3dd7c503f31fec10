"""GianConstruct back-office API"""
