"""
Watson Image Tagger

A small HTTP service that sends an image URL to IBM Watson Visual
Recognition, and turns the general classifier and face detection results
into a short, score-ranked list of tags plus age and face location data.
"""

__version__ = "1.0.0"
__author__ = "Watson Image Tagger Team"
