"""YelpCamp: campground listings with reviews, comments and follower notifications."""
