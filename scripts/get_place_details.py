#!/usr/bin/env python3
"""
Quick script to look up a place with the GoogleMapsClient and print the
details as indented JSON, along with the photo references a shop would get.
"""

import json
import os
import sys

import requests
from dotenv import load_dotenv

from teafinder.services.google_maps import GoogleMapsClient


def main():
    # Load environment variables (to get API key if it's in .env)
    load_dotenv()

    api_key = os.getenv("GOOGLE_MAPS_API_KEY")
    if not api_key:
        api_key = input("Enter your Google Maps API key: ")

    if len(sys.argv) > 1:
        place_id = sys.argv[1]
    else:
        place_id = input("Enter a place ID: ")

    client = GoogleMapsClient(api_key=api_key)

    try:
        print(json.dumps(client.place_details(place_id), indent=2))
        print(f"Photo references: {client.place_photo_references(place_id)}")
    except requests.RequestException as e:
        print(f"Error retrieving place details: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
